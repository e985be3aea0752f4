"""
Basic SMS Example

This example demonstrates how to send an SMS and check the wallet
balance using the AT-Connect Python SDK.
"""

import os
from dotenv import load_dotenv

from at_connect import AtClient, AfricasTalkingError

# Load environment variables from .env file
load_dotenv()


def main():
    """Main example function."""
    client = AtClient(
        api_key=os.getenv("AFRICASTALKING_API_KEY"),
        username=os.getenv("AFRICASTALKING_USERNAME", "sandbox"),
    )

    recipients = ["+254711XXXYYY", "+254733YYYZZZ"]

    try:
        print(f"Sending SMS to {len(recipients)} recipients...")
        result = client.send_sms(recipients, "Your order has shipped")

        print(result.message)
        for recipient in result.recipients:
            marker = "✓" if recipient.is_successful else "✗"
            print(f"  {marker} {recipient.number}: {recipient.status} ({recipient.cost})")

        balance = client.get_application_data().balance
        print(f"Remaining balance: {balance}")

    except AfricasTalkingError as e:
        print(f"Error: {e}")

    finally:
        client.close()


if __name__ == "__main__":
    main()
