# Standard library imports
import os

# File that mirrors primary output when saving is enabled
RESULTS_PATH = os.environ.get('URLBITS_RESULTS_PATH', 'results.txt')

# Directory for the rotating log file; empty disables file logging
LOG_DIR = os.environ.get('URLBITS_LOG_DIR', '')

# Pipeline configuration. A queue size of 0 leaves stage queues unbounded
PIPELINE_CONFIG = {
    'queue_size': int(os.environ.get('URLBITS_QUEUE_SIZE', 0)),
    'concurrent': True,
    'encoding': 'utf-8',
}

# Logging configuration for the rotating file handler
LOGGING_CONFIG = {
    'max_bytes': 10 * 1024 * 1024,  # 10MB
    'backup_count': 5,
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'datefmt': '%Y-%m-%d %H:%M:%S',
}

# Kafka Configuration, used only when a topic is given
KAFKA_BROKERS = os.environ.get('URLBITS_KAFKA_BROKERS', 'localhost:9092')
KAFKA_TOPIC = os.environ.get('URLBITS_KAFKA_TOPIC', '')
