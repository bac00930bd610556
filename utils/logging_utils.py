from typing import Dict, Iterable


def mask_value(value: str) -> str:
    if not isinstance(value, str):
        return value
    if '@' in value:  # email
        name, _, domain = value.partition('@')
        return (name[:2] + '***@' + domain) if name else '***@' + domain
    if len(value) > 12:
        return value[:4] + '...' + value[-4:]
    return '***'


def mask_phone(value: str) -> str:
    """Keep only the last three digits of a phone number."""
    if not isinstance(value, str):
        return value
    digits = [c for c in value if c.isdigit()]
    if len(digits) <= 3:
        return '***'
    return '*' * (len(digits) - 3) + ''.join(digits[-3:])


# Fields of an order's delivery details that identify the buyer
PII_FIELDS = {'delivery_address': mask_value, 'phone_number': mask_phone}


def sanitize_payload(payload: Dict, allowed_keys: Iterable[str]) -> Dict:
    """Return a filtered copy of payload with only allowed keys, PII fields masked."""
    result = {}
    for key in allowed_keys:
        if key in payload:
            masker = PII_FIELDS.get(key)
            result[key] = masker(payload[key]) if masker else payload[key]
    return result
