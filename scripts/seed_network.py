"""
Create a demo network with one wallet account for local testing.
"""
import argparse
import asyncio

from sqlalchemy import select

from wallet_monitor.db.models import Account, Network
from wallet_monitor.infrastructure.database import get_session_factory, init_db


async def seed(prefix: str, endpoint: str, token: str, phone: str) -> None:
    await init_db()

    async with get_session_factory()() as db:
        existing = (await db.execute(select(Network).where(Network.prefix == prefix))).scalars().first()
        if existing:
            print(f"Network {prefix} already exists")
            return

        network = Network(name=prefix.upper(), prefix=prefix)
        db.add(network)
        await db.flush()
        db.add(
            Account(
                network_id=network.id,
                name=f"{prefix}-wallet",
                wallet_endpoint_url=endpoint,
                wallet_bearer_token=token,
                phone_number=phone,
            )
        )
        await db.commit()

        print(f"Network {prefix} created, webhook URL: /api/webhook/{prefix}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("prefix")
    parser.add_argument("--endpoint", default="http://localhost:9000/balance")
    parser.add_argument("--token", default="demo-token")
    parser.add_argument("--phone", default="0800000000")
    args = parser.parse_args()
    asyncio.run(seed(args.prefix, args.endpoint, args.token, args.phone))


if __name__ == "__main__":
    main()
