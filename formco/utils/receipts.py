# utils/receipts.py
import logging
import re
import time
from pathlib import Path

from formco.config import Settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/receipts"
MAX_RECEIPT_SIZE = 5 * 1024 * 1024
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
	name = _UNSAFE.sub("_", Path(filename or "").name).strip("._")
	return name or "receipt"


def store_receipt(filename: str, data: bytes) -> str:
	"""
	Save an uploaded payment receipt and return its public path.

	Files land in ``Settings().receipts_dir`` as ``<epoch-millis>-<name>``.

	Raises:
		ValueError: empty upload or larger than ``MAX_RECEIPT_SIZE``.
	"""
	if not data:
		raise ValueError("receipt is empty")
	if len(data) > MAX_RECEIPT_SIZE:
		raise ValueError(f"receipt exceeds {MAX_RECEIPT_SIZE // (1024 * 1024)}MB limit")

	directory = Settings().receipts_dir
	directory.mkdir(parents=True, exist_ok=True)
	stored_name = f"{int(time.time() * 1000)}-{safe_filename(filename)}"
	(directory / stored_name).write_bytes(data)

	logger.info("stored receipt %s (%d bytes)", stored_name, len(data))
	return f"{PUBLIC_PREFIX}/{stored_name}"
