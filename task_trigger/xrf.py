"""Cross-site request forgery keys for the repository service."""

import random
import string

XRF_ALPHABET = string.ascii_lowercase + string.digits
XRF_KEY_LENGTH = 16

_rng = random.Random()


def make_xrf_key(rng: random.Random | None = None) -> str:
    """Return a fresh 16 character key drawn from ``[a-z0-9]``.

    The service checks that the key in the query string matches the
    ``X-Qlik-Xrfkey`` header, so every request needs its own key.
    """
    source = rng or _rng
    return "".join(source.choice(XRF_ALPHABET) for _ in range(XRF_KEY_LENGTH))
