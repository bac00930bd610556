# Utils package for Shoplink backend

from .logging_utils import mask_phone, mask_value, sanitize_payload

__all__ = ["mask_phone", "mask_value", "sanitize_payload"]
