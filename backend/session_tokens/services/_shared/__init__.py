"""Building blocks shared by every service: base class, errors and ports."""
