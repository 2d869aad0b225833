"""
Contracts (data models).

Shapes shared by the client, the submission strategies and the verification
state machine, so that mock and real HTTP clients feed the same structures.
"""
