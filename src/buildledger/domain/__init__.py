"""Domain layer for buildledger application.

Services are imported from their modules directly (e.g.
``buildledger.domain.ledger.LedgerService``); importing them here would make
``buildledger.domain.entities`` pull in the database layer.
"""
