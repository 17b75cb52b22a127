"""
Application configuration for the core marketplace app.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """
    App config that wires the marketplace services together at start-up.

    Stores are constructed once here and injected into the listing query
    engine, the purchase lifecycle manager and the waste identifier. Views
    reach them through ``apps.get_app_config('core')``.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Waste Marketplace'

    def ready(self):
        from .identification import WasteIdentifier
        from .services import ListingQueryEngine, PurchaseLifecycleManager
        from .stores import ListingStore, PurchaseStore, UserStore

        self.listing_store = ListingStore()
        self.purchase_store = PurchaseStore()
        self.user_store = UserStore()

        self.listing_query_engine = ListingQueryEngine(self.listing_store)
        self.purchase_lifecycle = PurchaseLifecycleManager(
            self.listing_store,
            self.purchase_store
        )
        self.waste_identifier = WasteIdentifier.from_settings()
