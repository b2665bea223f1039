"""
Move Masters Relocation Engine — Job Workflow, Ledger, Custody
=================================================================
One relocation job from dispatch to completion:

    models     — Job aggregate, statuses, custody holder, inventory lines
    tariff     — charge ledger aggregation, overage, payments
    billing    — job-level payments, charge edits, payment clearance
    workflow   — 14-state gated lifecycle and client signatures
    custody    — warehouse arrival/handshake and outbound dispatch
    inventory  — grouped inventory lines with stage locks
    payouts    — advisory crew earnings statements
    services   — JobDesk, the single-writer owner of a job
"""
