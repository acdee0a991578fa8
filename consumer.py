from confluent_kafka import Consumer, KafkaException
import json

from config import KAFKA_BROKER, ITEMSETS_TOPIC, CONSUMER_GROUP

conf = {
    'bootstrap.servers': KAFKA_BROKER,
    'group.id': CONSUMER_GROUP,
    'auto.offset.reset': 'earliest',
}

consumer = Consumer(conf)
consumer.subscribe([ITEMSETS_TOPIC])

print("Listening for frequent itemsets... Ctrl+C to stop.")

try:
    while True:
        msg = consumer.poll(timeout=1.0)
        if msg is None:
            continue
        if msg.error():
            raise KafkaException(msg.error())

        payload = json.loads(msg.value())
        window = payload.get("window", {})
        itemsets = payload.get("itemsets", [])

        print(f"\n=== Window size: {window.get('size_transactions', '?')}, min support: {window.get('min_support_count', '?')} ===")
        for itemset in sorted(itemsets, key=lambda i: i.get("support", 0), reverse=True):
            print(f"Itemset: {itemset.get('items', [])}, Support: {itemset.get('support', 0)}")

except KeyboardInterrupt:
    print("Stopping consumer...")
finally:
    consumer.close()
