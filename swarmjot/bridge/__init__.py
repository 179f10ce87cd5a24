"""Bridge layer between swarmjot and the outside world.

Modules
-------
bee
    Async ``BeeClient`` over the Bee node HTTP API (httpx).  Every write
    carries a postage batch id; failures surface as ``BeeApiError``.
crypto_bridge
    Ed25519 signing and verification of website feed updates (PyNaCl).
local_node
    ``LocalBeeNode``, an in-process emulation of the Bee endpoints mounted
    behind ``httpx.MockTransport`` for offline runs and tests.
"""
