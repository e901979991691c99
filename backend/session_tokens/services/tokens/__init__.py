"""Token issuer: access/refresh token signing, verification and revocation."""
