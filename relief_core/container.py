"""Dependency injection container.

This module provides a simple DI container without external frameworks.
Service handles (cache, provider chain, event bus, record store) are
built once at process start and handed to the services that need them;
business logic never reaches for ambient globals.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(DisasterService)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: StubGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def start(self) -> None:
        """Start background workers (cache sweeper)."""
        from .adapters.cache import CacheSweeper

        self.resolve(CacheSweeper).start()

    def shutdown(self) -> None:
        """Stop background workers that were created."""
        from .adapters.cache import CacheSweeper
        from .ports.events import PublisherPort
        from .services import EventBus, GeocodeProviderChain

        with self._lock:
            created = dict(self._singletons)
        if CacheSweeper in created:
            created[CacheSweeper].stop()
        bus = created.get(EventBus) or created.get(PublisherPort)
        if isinstance(bus, EventBus):
            bus.close()
        if GeocodeProviderChain in created:
            created[GeocodeProviderChain].close()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Provider order: Google Maps (only when an API key is configured),
        then Nominatim, then the static fallback table.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import CacheSweeper, InMemoryCache
        from .adapters.geocoding import (
            GoogleGeocoderAdapter,
            NominatimGeocoderAdapter,
            StaticFallbackTable,
        )
        from .adapters.nlp import GeminiLocationExtractor, KeywordLocationExtractor
        from .adapters.storage import InMemoryDisasterRepository
        from .ports.cache import CachePort
        from .ports.events import PublisherPort
        from .ports.nlp import LocationExtractorPort
        from .ports.repository import DisasterRepositoryPort
        from .services import (
            AuditLedger,
            DisasterService,
            EventBus,
            GeocodeProviderChain,
            LocationResolver,
        )

        config = config or get_config()
        container = cls(config=config)

        # Cache (shared by extraction and geocoding)
        cache: InMemoryCache[Any] = InMemoryCache(
            name="location",
            default_ttl_seconds=config.cache.default_ttl_seconds,
            max_size=config.cache.max_size,
        )
        container.register(CachePort, lambda: cache)
        container.register(
            CacheSweeper,
            lambda: CacheSweeper(cache, config.cache.sweep_interval_seconds),
        )

        # Extraction
        container.register(
            LocationExtractorPort,
            lambda: GeminiLocationExtractor(config.extraction, cache),
        )

        # Geocoding
        def create_chain() -> GeocodeProviderChain:
            providers: list[Any] = []
            if config.geocoding.google_api_key:
                providers.append(GoogleGeocoderAdapter(config.geocoding))
            providers.append(NominatimGeocoderAdapter(config.geocoding))
            return GeocodeProviderChain(
                providers=providers,
                fallback_table=StaticFallbackTable(),
                timeout_seconds=config.geocoding.provider_timeout_seconds,
                max_workers=config.geocoding.max_workers,
            )

        container.register(GeocodeProviderChain, create_chain)

        container.register(
            LocationResolver,
            lambda: LocationResolver(
                chain=container.resolve(GeocodeProviderChain),
                cache=container.resolve(CachePort),
                extractor=container.resolve(LocationExtractorPort),
                fallback_extractor=KeywordLocationExtractor(),
                ttl_seconds=config.cache.default_ttl_seconds,
            ),
        )

        # Storage and events
        container.register(DisasterRepositoryPort, InMemoryDisasterRepository)
        bus = EventBus(name=config.events.event_name)
        container.register(EventBus, lambda: bus)
        container.register(PublisherPort, lambda: bus)
        container.register(AuditLedger, AuditLedger)

        # Main service
        def create_disaster_service() -> DisasterService:
            return DisasterService(
                resolver=container.resolve(LocationResolver),
                repository=container.resolve(DisasterRepositoryPort),
                ledger=container.resolve(AuditLedger),
                publisher=container.resolve(PublisherPort),
                event_name=config.events.event_name,
                max_update_retries=config.store.max_update_retries,
            )

        container.register(DisasterService, create_disaster_service)

        return container
