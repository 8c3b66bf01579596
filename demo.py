#!/usr/bin/env python3
"""
pioclient Demo
Imports sample events and queries an engine, the way an application would.
"""

import argparse
import asyncio
import random
import sys

from pioclient import EngineClient, EventClient, PioClientError
from pioclient.utils import setup_logging


def run_events(client: EventClient):
    """Import 10 users, 50 items and some random views and buys."""
    if not client.is_alive():
        print(f"❌ Event server not reachable at {client.base_url}")
        sys.exit(1)

    print("\n👤 Adding users...")
    for user in range(1, 11):
        response = client.set_user(str(user), {"name": f"user{user}"})
        print(f"   ├─ user {user}: {response.event_id}")

    print("\n📦 Adding items...")
    for item in range(1, 51):
        client.set_item_categories(str(item), ["1"])
    print("   └─ 50 items added")

    print("\n👀 Recording actions...")
    for user in range(1, 11):
        for _ in range(10):
            item = random.randint(1, 50)
            try:
                client.view(str(user), str(item))
            except PioClientError as e:
                print(f"   ├─ view failed: {e}")
        # buys go out concurrently
        futures = [client.buy_async(str(user), str(random.randint(1, 50))) for _ in range(5)]
        for future in futures:
            try:
                future.result()
            except PioClientError as e:
                print(f"   ├─ buy failed: {e}")
        print(f"   ├─ user {user}: 10 views, 5 buys")


async def _recommend_async(client: EngineClient, user: str, num: int):
    return await asyncio.wrap_future(client.recommend_async(user, num, categories=["1"]))


def run_query(client: EngineClient, user: str, num: int):
    """Ask the engine for recommendations, blocking and non-blocking."""
    try:
        result = client.recommend(user, num, categories=["1"])
        print("\n📊 Sync:")
        for score in result.item_scores:
            print(f"   ├─ {score.item}: {score.score:.4f}")

        result = asyncio.run(_recommend_async(client, user, num))
        print("\n📊 Async:")
        for score in result.item_scores:
            print(f"   ├─ {score.item}: {score.score:.4f}")
    except PioClientError as e:
        print(f"❌ Query failed: {e}")


def main():
    parser = argparse.ArgumentParser(description="🧠 pioclient Demo")
    parser.add_argument('mode', choices=['events', 'query'], help='What to run')
    parser.add_argument('--access-key', type=str, default=None, help='Access key (default: $PIO_ACCESS_KEY)')
    parser.add_argument('--url', type=str, default=None, help='Server URL')
    parser.add_argument('--user', type=str, default='1', help='User to recommend for')
    parser.add_argument('--num', type=int, default=10, help='Number of recommendations')
    parser.add_argument('--log-level', type=str, default='WARNING')

    args = parser.parse_args()
    setup_logging(args.log_level)

    print("=" * 60)
    print("🧠 pioclient Demo")
    print("=" * 60)

    try:
        if args.mode == 'events':
            with EventClient(args.access_key, base_url=args.url) as client:
                run_events(client)
        else:
            with EngineClient(args.access_key, base_url=args.url) as client:
                run_query(client, args.user, args.num)
    except PioClientError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
