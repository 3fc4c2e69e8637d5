import re


def normalize_whitespace(text: str) -> str:
    if not text:
        return ""
    text = str(text).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def normalize_name(text: str) -> str:
    """
    Clean pump / tank / fuel type names for matching:
    - strip, collapse spaces
    - uppercase
    """
    text = normalize_whitespace(text)
    return text.upper()


def fuel_key(text: str) -> str:
    """
    Key used for fuel types in price payloads: "Premium Petrol" -> "premiumpetrol".
    """
    return normalize_whitespace(text).lower().replace(" ", "")


def normalize_header(header: str) -> str:
    """Lowercase, strip, and collapse non-alphanumerics to underscore."""
    cleaned = "".join(ch.lower() if ch.isalnum() else "_" for ch in str(header))
    return "_".join([segment for segment in cleaned.split("_") if segment])
