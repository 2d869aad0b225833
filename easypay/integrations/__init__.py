"""
Integrations layer.

Everything that talks to, or describes, the payment gateway:
- contracts/: request, record, outcome and result shapes
- clients/: the real HTTP client and a scripted mock with the same interface
- policy/: routing, submission strategies, verification and response wrappers

Key rule:
- Only clients/ performs I/O. policy/ receives a client and never builds one.
"""
