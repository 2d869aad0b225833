"""
Real HTTP integration clients.

Must expose the same coroutine methods as clients/mocks/payments.py:
initiate_charge, verify_charge, initialize_hosted, lookup_transaction.
"""
