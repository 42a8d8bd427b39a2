# src/chainforensics/utils/config.py
from decimal import Decimal

class Config:
    # Chain tracer configuration
    MAX_HOPS = 3
    HOP_WINDOW = 300  # 5 minutes in seconds
    RESULT_LIMIT = 20
    MIN_CHAIN_OCCURRENCES = 1

    # Cycle detector configuration
    CYCLE_WINDOW = 300  # 5 minutes in seconds

    # Exchange flow configuration
    MIN_DISTINCT_EXCHANGES = 2

    # Outlier scorer configuration
    DEVIATION_THRESHOLD = Decimal('0.5')
    STATS_PRECISION = 50  # decimal digits used for mean/stddev

    # Supplementary analytics
    TOP_BLOCK_FRACTION = Decimal('0.10')  # top 10% of blocks by gas used
    LARGE_TRANSFER_THRESHOLD = Decimal('10')

    # API configuration
    API_HOST = "127.0.0.1"
    API_PORT = 8000

    # Monitoring configuration
    LOG_DIR = "logs"
    LOG_LEVEL = "INFO"
    LOG_MAX_SIZE = 10 * 1024 * 1024  # 10MB
    LOG_BACKUP_COUNT = 5
