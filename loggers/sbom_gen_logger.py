import logging
from pathlib import Path
from configuration import Configuration as Config

p = Path(__file__).resolve()

# cdxgen subprocess invocations
sbom_gen_logger = logging.getLogger("sbom_server.sbom_gen")
sbom_gen_logger.setLevel(logging.DEBUG)

# Create handlers for file and console
Config.log_dir.mkdir(parents=True, exist_ok=True)
file_handler_path = Path(Config.log_dir, "sbom_gen.log")
file_handler = logging.FileHandler(file_handler_path, mode='a', encoding="utf-8")
console_handler = logging.StreamHandler()

file_handler.setLevel(logging.INFO)
console_handler.setLevel(Config.log_level)

formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
file_handler.setFormatter(formatter)
console_handler.setFormatter(formatter)

if not sbom_gen_logger.handlers:
    sbom_gen_logger.addHandler(file_handler)
    sbom_gen_logger.addHandler(console_handler)
