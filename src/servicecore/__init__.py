"""
servicecore: shared core for small REST microservices.

Generic paginated repositories, a message-code catalog, JSON response
envelopes and one error dispatcher that turns every failure into an envelope.
"""
