"""
Async Bulk SMS Example

This example demonstrates how to send personalised messages concurrently
using the async client.
"""

import asyncio
import os
from dotenv import load_dotenv

from at_connect import AsyncAtClient, AfricasTalkingError

load_dotenv()


async def send_reminders():
    """Send one personalised reminder per customer concurrently."""
    customers = {
        "+254711XXXYYY": "Amina",
        "+254722XXXYYY": "Brian",
        "+254733XXXYYY": "Chebet",
    }

    async with AsyncAtClient(
        api_key=os.getenv("AFRICASTALKING_API_KEY"),
        username=os.getenv("AFRICASTALKING_USERNAME", "sandbox"),
    ) as client:
        tasks = [
            client.send_sms(number, f"Hi {name}, your invoice is due tomorrow.")
            for number, name in customers.items()
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        print("\nResults:")
        print("-" * 60)
        for number, result in zip(customers, results):
            if isinstance(result, AfricasTalkingError):
                print(f"✗ {number}: Error - {result}")
            elif isinstance(result, Exception):
                raise result
            else:
                print(f"✓ {number}: {result.message}")


if __name__ == "__main__":
    asyncio.run(send_reminders())
