import os
import sys

import requests
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def main():
    print("🚀 Starting CSV download smoke test...\n")

    base_url = os.getenv("SMOKE_BASE_URL", "http://127.0.0.1:8000")
    query = os.getenv("SMOKE_QUERY", "SELECT 1 AS one")
    mode = sys.argv[1] if len(sys.argv) > 1 else "buffered"

    payload = {
        "query": query,
        "filename": "smoke.csv",
        "mode": mode,
    }

    print(f"📡 POST {base_url}/export/csv ({mode})...\n")

    response = requests.post(
        f"{base_url}/export/csv",
        json=payload,
        stream=True,
        timeout=30
    )

    print("🔢 HTTP Status Code:", response.status_code)
    for name in ("Content-type", "Content-Disposition", "Content-length"):
        print(f"   {name}: {response.headers.get(name)}")

    if response.status_code != 200:
        print("\n❌ Request failed, see error above")
        print(response.text)
        sys.exit(1)

    received = 0
    for chunk in response.iter_content(chunk_size=8192):
        if received == 0:
            print("\n📦 First bytes:")
            print(chunk[:200].decode("utf-8", errors="replace"))
        received += len(chunk)

    print(f"\n✅ Received {received} bytes")

    expected = response.headers.get("Content-length")
    if expected is not None and int(expected) != received:
        print(f"❌ Content-length said {expected}")
        sys.exit(1)


if __name__ == "__main__":
    main()
