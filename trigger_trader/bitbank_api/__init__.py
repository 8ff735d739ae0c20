"""
bitbank API modules
Signing, account and order helpers used by BitbankClient
"""
