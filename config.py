# --- Kafka configuration ---
KAFKA_BROKER = "localhost:38441"
TRANSACTIONS_TOPIC = "transactions" # input
ITEMSETS_TOPIC = "frequent_itemsets" # mined itemsets per window
CONSUMER_GROUP = "itemsets_consumer"


# --- FP-Growth configuration ---
MIN_SUPPORT = 0.4 # relative min support (0 < s < 1)

# streaming windowing
WINDOW_MAX_TRANSACTIONS = 100 # sliding window size
EMIT_AFTER_TRANSACTIONS = 20 # mine the window every N transactions

# logging
LOG_LEVEL = "INFO"
