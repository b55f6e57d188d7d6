from .verifier import (
    verify_signature,
    compute_signature,
    is_meaningful_change,
    MeaningfulChangeFilter,
    parse_repository_key,
    repository_callback_url,
)

__all__ = [
    'verify_signature',
    'compute_signature',
    'is_meaningful_change',
    'MeaningfulChangeFilter',
    'parse_repository_key',
    'repository_callback_url',
]
