from prometheus_client import Counter


payment_volume_total = Counter("payment_volume_total", "Total payment volume processed", ["currency", "status"])

payout_volume_total = Counter("payout_volume_total", "Total payout volume processed", ["currency", "status"])

platform_commission_total = Counter("platform_commission_total", "Platform commission recorded", ["currency"])

payment_proof_uploads_total = Counter("payment_proof_uploads_total", "Payment proof uploads", ["outcome"])
