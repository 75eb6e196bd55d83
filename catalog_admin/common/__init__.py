# Common utilities
from .config_loader import ConfigError, load_config, load_demo_products, load_settings, require_env
from .csv_utils import configure_csv, parse_csv_text, read_csv
from .log_config import setup_logging
from .text_utils import alt_text_from_filename, generate_handle, parse_number
