"""
Ark DEX adapter — chain module bridging the Ark REST API and a DEX orchestrator.

Normalizes Ark transactions and blocks into the canonical DEX schema,
aggregates multisig signatures from independent co-signers, and publishes
new blocks to subscribers by periodic polling.
"""

__version__ = "0.1.0"
__author__ = "Ark DEX adapter contributors"
