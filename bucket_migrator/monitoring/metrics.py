from prometheus_client import REGISTRY, Counter, Gauge, Histogram


class Metrics:
    """Prometheus metrics for the bucket migrator."""
    def __init__(self, registry=REGISTRY):
        # Listing metrics
        self.objects_listed = Counter(
            'migrator_objects_listed_total',
            'Number of objects seen in the source listing',
            registry=registry
        )
        self.objects_spooled = Counter(
            'migrator_objects_spooled_total',
            'Number of object keys written to the spool',
            registry=registry
        )
        self.listing_errors = Counter(
            'migrator_listing_errors_total',
            'Number of source listing calls that failed',
            registry=registry
        )

        # Transfer metrics
        self.transfers = Counter(
            'migrator_transfers_total',
            'Number of finished transfers',
            ['outcome'],
            registry=registry
        )
        self.upload_retries = Counter(
            'migrator_upload_retries_total',
            'Number of upload attempts made after a retryable failure',
            registry=registry
        )
        self.bytes_transferred = Counter(
            'migrator_bytes_transferred_total',
            'Bytes uploaded to the destination bucket',
            registry=registry
        )
        self.transfers_in_flight = Gauge(
            'migrator_transfers_in_flight',
            'Transfers currently running',
            registry=registry
        )
        self.transfer_duration = Histogram(
            'migrator_transfer_duration_seconds',
            'Time spent on a single transfer',
            registry=registry
        )

        # Upload slot pool metrics
        self.upload_slots_minted = Counter(
            'migrator_upload_slots_minted_total',
            'Number of upload URLs requested from B2',
            ['reason'],
            registry=registry
        )
        self.upload_slots_discarded = Counter(
            'migrator_upload_slots_discarded_total',
            'Number of upload URLs dropped after a failed upload',
            registry=registry
        )
