"""Protean Engine runner for the Third Hand domains.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Cross-domain handlers (Gallery reacting to Payments, Notifications reacting
to everyone) only run here, so production needs every engine up.

Usage:
    python src/server.py                        # Run all domain engines
    python src/server.py --domain payments      # Run only the payments engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

from shared.logging import configure_logging

DOMAIN_NAMES = ["identity", "gallery", "payments", "messaging", "notifications"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "identity":
        from identity.domain import identity as domain
    elif name == "gallery":
        from gallery.domain import gallery as domain
    elif name == "payments":
        from payments.domain import payments as domain
    elif name == "messaging":
        from messaging.domain import messaging as domain
    elif name == "notifications":
        from notifications.domain import notifications as domain
    else:
        raise ValueError(f"Unknown domain: {name}")

    domain.init()
    return domain


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Third Hand Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    configure_logging("engine")
    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
