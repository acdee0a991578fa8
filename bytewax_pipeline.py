from bytewax.dataflow import Dataflow
from bytewax import operators as op
from bytewax.connectors.kafka import KafkaSource, KafkaSink, KafkaSinkMessage
import logging

from config import (
    KAFKA_BROKER, TRANSACTIONS_TOPIC, ITEMSETS_TOPIC,
    MIN_SUPPORT, WINDOW_MAX_TRANSACTIONS, EMIT_AFTER_TRANSACTIONS,
    LOG_LEVEL,
)
from stream_miner import StreamItemsetMiner, decode_transaction
from utils import encode_itemsets

# Logging configuration
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("ItemsetPipeline")


def build_miner():
    return StreamItemsetMiner(
        min_support=MIN_SUPPORT,
        window_max_transactions=WINDOW_MAX_TRANSACTIONS,
        emit_after_transactions=EMIT_AFTER_TRANSACTIONS,
    )


# ---------- Stateful step ----------

def step(state: StreamItemsetMiner, value):
    if state is None:
        state = build_miner()

    try:
        transaction = decode_transaction(value)
        state.observe(transaction)
    except ValueError as ve:
        logger.error(f"Skipping malformed transaction: {ve}")
        return state, []

    msgs = []
    itemsets = state.maybe_emit()
    if itemsets:
        logger.info(f"Window of {len(state.window)} transactions: {len(itemsets)} frequent itemsets")
        msgs.append(
            KafkaSinkMessage(
                key=b"itemsets",
                value=encode_itemsets(itemsets, len(state.window), state.min_support_count()),
                topic=ITEMSETS_TOPIC,
            )
        )
    return state, msgs


# ---------- Flow definition ----------

flow = Dataflow("fpgrowth_itemsets")

# Kafka input -> single global key, the whole stream shares one window
kinp = op.input("input", flow, KafkaSource([KAFKA_BROKER], [TRANSACTIONS_TOPIC]))
keyed = op.map("to_key_value", kinp, lambda msg: ("__global__", msg.value))

mined = op.stateful_flat_map("fpgrowth_step", keyed, step)

# Drop the stateful key, keep only KafkaSinkMessages
just_msgs = op.map("drop_key", mined, lambda kv: kv[1])

# Output to Kafka
op.output("kafka-out", just_msgs, KafkaSink([KAFKA_BROKER], topic=None))
