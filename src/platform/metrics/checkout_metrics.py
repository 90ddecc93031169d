from prometheus_client import Counter, Gauge, Histogram


class CheckoutMetrics:
    """
    Checkout Core Metrics Collector

    Tracks seat holds, transaction lifecycle transitions, the expiration sweeper
    and lock-contention retries.
    """

    def __init__(self):
        # ========== Seat Inventory Metrics ==========
        self.seat_reservation_requests = Counter(
            'checkout_seat_reservation_requests_total',
            'Total seat reservation attempts',
            ['event_id', 'tier', 'result'],  # result: success/insufficient/error
        )

        self.seat_reservation_duration = Histogram(
            'checkout_seat_reservation_duration_seconds',
            'Create-pending processing time',
            ['event_id', 'tier'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        # ========== Transaction Lifecycle Metrics ==========
        self.transaction_transitions = Counter(
            'checkout_transaction_transitions_total',
            'Transaction status transitions',
            ['to_status'],  # pending/paid/expired/cancelled
        )

        self.transaction_revenue = Counter(
            'checkout_transaction_revenue_total',
            'Sum of final prices of paid transactions',
            ['event_id'],
        )

        # ========== Expiration Sweeper Metrics ==========
        self.sweep_runs = Counter(
            'checkout_sweep_runs_total',
            'Expiration sweep runs',
            ['trigger'],  # timer/cron
        )

        self.sweep_expired = Counter(
            'checkout_sweep_expired_total',
            'Transactions expired by the sweeper',
        )

        self.sweep_failures = Counter(
            'checkout_sweep_failures_total',
            'Sweep candidates that failed to expire',
        )

        self.sweep_last_run = Gauge(
            'checkout_sweep_last_run_timestamp_seconds',
            'Unix time of the last completed sweep',
        )

        # ========== Concurrency Metrics ==========
        self.lock_retries = Counter(
            'checkout_lock_retries_total',
            'Retries after lock contention',
            ['operation'],
        )

    # ========== Helper Methods ==========

    def record_seat_reservation(self, *, event_id: int, tier: str, result: str, duration: float):
        self.seat_reservation_requests.labels(event_id=event_id, tier=tier, result=result).inc()
        self.seat_reservation_duration.labels(event_id=event_id, tier=tier).observe(duration)

    def record_transition(self, *, to_status: str):
        self.transaction_transitions.labels(to_status=to_status).inc()

    def record_payment(self, *, event_id: int, amount: int):
        self.record_transition(to_status='paid')
        self.transaction_revenue.labels(event_id=event_id).inc(amount)

    def record_sweep(self, *, trigger: str, expired: int, failed: int, finished_at: float):
        self.sweep_runs.labels(trigger=trigger).inc()
        self.sweep_expired.inc(expired)
        self.sweep_failures.inc(failed)
        self.sweep_last_run.set(finished_at)

    def record_lock_retry(self, *, operation: str):
        self.lock_retries.labels(operation=operation).inc()


# Global metrics instance
metrics = CheckoutMetrics()
