import asyncio
import os
import sys
from dotenv import load_dotenv

# Add src to path so we can import game_agent
sys.path.append(os.path.join(os.path.dirname(__file__), "src"))

from game_agent.orchestrator import run_query_streaming

STEP_ICONS = {
    "thinking": "🤔",
    "plan": "📋",
    "tool_call": "🔧",
    "tool_result": "📊",
    "review": "🔍",
    "generating_answer": "✍️",
    "answer": "✅",
    "error": "❌",
}


async def print_event(event):
    data = event["data"]
    if event["type"] == "step":
        icon = STEP_ICONS.get(data["kind"], "•")
        print(f"{icon} {data['name']}: {data['summary']}")
    elif event["type"] == "answer":
        print("\n--- Answer ---\n")
        print(data.get("answer", ""))
    elif event["type"] == "error":
        print("\n--- Error ---\n")
        print(data.get("error", ""))


def main():
    # Load environment variables (GOOGLE_API_KEY, RAWG_API_KEY)
    load_dotenv()

    if len(sys.argv) < 2:
        print('Usage: python run.py "<question about video games>"')
        return

    if not (os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")) or not os.getenv("RAWG_API_KEY"):
        print("Error: GOOGLE_API_KEY and RAWG_API_KEY environment variables must be set.")
        print("Please set them in a .env file or export them in your terminal.")
        return

    query = " ".join(sys.argv[1:])
    print(f"\n--- Question: {query} ---\n")

    asyncio.run(run_query_streaming(query, print_event))

    print("\n--- Agent Execution Finished ---")


if __name__ == "__main__":
    main()
