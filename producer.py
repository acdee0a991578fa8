from confluent_kafka import Producer
import json
import sys
import time
from config import KAFKA_BROKER, TRANSACTIONS_TOPIC

# Kafka Producer configuration
config = {
    'bootstrap.servers': KAFKA_BROKER,
    'acks': 'all',
}
producer = Producer(config)

SAMPLE_TRANSACTIONS = [
    ['f', 'a', 'c', 'd', 'g', 'i', 'm', 'p'],
    ['a', 'b', 'c', 'f', 'l', 'm', 'o'],
    ['b', 'f', 'h', 'j', 'o', 'w'],
    ['b', 'c', 'k', 's', 'p'],
    ['a', 'f', 'c', 'e', 'l', 'p', 'm', 'n'],
]

# Delivery callback to confirm message delivery
def delivery_callback(err, msg):
    if err:
        print(f"Message failed delivery: {err}")
    else:
        print(f"Delivered to {msg.topic()} [{msg.partition()}] @ offset {msg.offset()}")


def load_transactions(path):
    """Read a JSON file holding a list of transactions."""
    with open(path) as f:
        transactions = json.load(f)
    if not isinstance(transactions, list):
        raise ValueError(f"{path} must contain a JSON list of transactions")
    return transactions


def send_transaction(transaction):
    producer.produce(
        TRANSACTIONS_TOPIC,
        value=json.dumps({"items": transaction}),
        callback=delivery_callback
    )
    producer.poll(0)


if __name__ == "__main__":
    transactions = load_transactions(sys.argv[1]) if len(sys.argv) > 1 else SAMPLE_TRANSACTIONS
    print(f"Sending {len(transactions)} transactions to '{TRANSACTIONS_TOPIC}'...")
    try:
        for transaction in transactions:
            send_transaction(transaction)
            time.sleep(0.05)
    except KeyboardInterrupt:
        print("Stopping producer...")
    finally:
        # Ensure all messages are delivered
        producer.flush()
    print("Done sending transactions")
