"""Simple launcher that reports one disaster through the core.

Prompts for a title and a description, creates the disaster with the
default wiring, and prints the `disaster_updated` event a connected
client would receive.
"""

from __future__ import annotations

import json
import sys

from relief_core.container import Container
from relief_core.domain.models import Actor, DisasterInput, Event
from relief_core.monitoring import configure_logging
from relief_core.services import DisasterService, EventBus


def print_event(event: Event) -> None:
    print(f"<- {event.type}")
    print(json.dumps(dict(event.payload), indent=2, default=str))


def main() -> None:
    container = Container.create_default()
    configure_logging(container.config.observability)
    container.start()

    print("=== Disaster report ===")
    if len(sys.argv) >= 3:
        title, description = sys.argv[1], sys.argv[2]
    else:
        title = input("Title : ").strip() or "NYC Flood"
        description = (
            input("Description : ").strip() or "Heavy flooding in Manhattan, NYC"
        )

    bus: EventBus = container.resolve(EventBus)
    service: DisasterService = container.resolve(DisasterService)

    with bus.subscribe(print_event):
        record = service.create_disaster(
            DisasterInput(title=title, description=description),
            Actor(id="netrunnerX"),
        )
        bus.drain(timeout=5.0)

    if record.coordinates is None:
        print(f"Created {record.id} without coordinates.")
    else:
        print(
            f"Created {record.id} at {record.coordinates.latitude}, "
            f"{record.coordinates.longitude} ({record.coordinates.source})"
        )
    container.shutdown()


if __name__ == "__main__":
    main()
