"""
Telemetry physics on a synthetic service stream.

accountservice latency wanders between 300 and 600 ms; on tick 6 ledgerwriter's
error rate jumps. Each tick is compared with the one before it.
"""

import copy
import numpy as np
from starlight import PhysicsMonitor

BASE = {
    "clusters": [
        {"name": "gcp-cluster-1", "location": "GCP", "status": "ONLINE"},
        {"name": "onprem-cluster-2", "location": "On-Prem", "status": "ONLINE"},
    ],
    "services": [
        {"name": "frontend", "status": "HEALTHY", "cluster": "gcp-cluster-1", "latency": 55, "errorRate": 0.1},
        {"name": "accountservice", "status": "DEGRADED", "cluster": "onprem-cluster-2", "latency": 450, "errorRate": 2.5},
        {"name": "ledgerwriter", "status": "HEALTHY", "cluster": "onprem-cluster-2", "latency": 150, "errorRate": 0.3},
    ],
    "databases": [
        {"name": "ledger-db", "type": "Primary", "status": "ONLINE", "cluster": "onprem-cluster-2", "activeConnections": 400},
    ],
    "businessMetrics": {"totalBalance": 135680.5, "transactionsPerSecond": 125, "failedTransactions": 8},
}

rng = np.random.default_rng(11)
monitor = PhysicsMonitor()

for tick in range(10):
    snap = copy.deepcopy(BASE)
    snap["services"][1]["latency"] = 300 + rng.random() * 300
    if tick >= 6:
        snap["services"][2]["errorRate"] = 1.4
    ind = monitor.observe(snap)
    print(f"[{tick}] KE={ind.total_kinetic_energy:9.2f}  F={ind.instability_force:.2f}  "
          f"risk={ind.risk_score:.3f}  {ind.narrative}")
