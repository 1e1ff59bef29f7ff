"""Check that the lead-scoring model endpoint is reachable with the configured key."""
import os
import sys

from dotenv import load_dotenv

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables before settings are read
load_dotenv()

from config import settings  # noqa: E402


def check_openai_connection() -> bool:
    api_key = settings.openai_api_key

    if not api_key:
        print("❌ OPENAI_API_KEY not found in environment")
        return False

    print(f"✓ API Key found: {api_key[:8]}...{api_key[-4:]}")

    try:
        from openai import OpenAI

        client = OpenAI(api_key=api_key, base_url=settings.openai_base_url)
        print(f"\nTesting {settings.lead_scoring_model} with a JSON-mode request...")
        response = client.chat.completions.create(
            model=settings.lead_scoring_model,
            messages=[
                {"role": "user", "content": 'Reply with the JSON object {"ok": true}.'},
            ],
            response_format={"type": "json_object"},
            max_tokens=20,
            temperature=0,
        )

        result = response.choices[0].message.content
        print(f"\n✅ Response: {result}")
        print(f"✅ Model used: {response.model}")
        print(f"✅ Tokens used: {response.usage.total_tokens}")
        return True

    except Exception as e:
        print(f"❌ Error connecting to the model endpoint: {e}")
        return False


if __name__ == "__main__":
    print("=" * 60)
    print("Checking lead-scoring model connection")
    print("=" * 60)
    ok = check_openai_connection()
    print("=" * 60)
    if ok:
        print("✅ Lead scoring will use the model.")
    else:
        print("❌ Lead scoring will fall back to the heuristic score.")
    print("=" * 60)
    sys.exit(0 if ok else 1)
