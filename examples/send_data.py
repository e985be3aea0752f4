"""
Mobile Data Example

This example demonstrates how to send data bundles to subscribers
using the AT-Connect Python SDK.
"""

import os
from dotenv import load_dotenv

from at_connect import (
    AtClient,
    AfricasTalkingError,
    DataUnit,
    DataValidity,
    MobileDataRecipient,
)

# Load environment variables from .env file
load_dotenv()


def main():
    """Main example function."""
    recipients = [
        MobileDataRecipient(
            phone_number="+254711XXXYYY",
            quantity=50,
            unit=DataUnit.MB,
            validity=DataValidity.DAY,
        ),
        MobileDataRecipient(
            phone_number="+254733YYYZZZ",
            quantity=1,
            unit=DataUnit.GB,
            validity=DataValidity.MONTH,
            metadata={"campaign": "loyalty"},
        ),
    ]

    with AtClient(
        api_key=os.getenv("AFRICASTALKING_API_KEY"),
        username=os.getenv("AFRICASTALKING_USERNAME", "sandbox"),
    ) as client:
        try:
            result = client.send_mobile_data("my-data-product", recipients)
            for entry in result.entries:
                print(f"  {entry.phone_number}: {entry.status} ({entry.value})")
        except AfricasTalkingError as e:
            print(f"Error: {e}")


if __name__ == "__main__":
    main()
