"""
Mock integration clients.

Return scripted gateway bodies without calling any external API. Used by the
test suite and the demo script's --mock mode.
"""
