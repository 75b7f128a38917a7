"""REST client for the municipal project funding API.

client.session holds the HTTP client, client.endpoints the per-resource
calls, client.models the record types.
"""
