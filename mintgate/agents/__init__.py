"""
Off-chain helpers for parties that issue mint authorizations.
"""
