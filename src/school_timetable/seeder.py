"""
Seeding pipeline: discover classes, fetch and parse each timetable, store it.
"""

import asyncio
from time import perf_counter
from typing import Optional

import aiohttp
import structlog

from .config import Config, get_config
from .db import LessonStore
from .discovery import discover_sources
from .errors import DiscoveryError, FetchError, PersistenceError
from .fetch import fetch_html
from .models import ClassResult, ParseOptions, ScheduleSource, SeedSummary
from .parser import parse_schedule_page

logger = structlog.get_logger()


async def seed_class(
        source: ScheduleSource,
        options: ParseOptions,
        store: Optional[LessonStore],
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None
) -> ClassResult:
    """
    Fetch, parse and store the timetable of one class.

    Failures never propagate: they are logged and reported as a skipped
    ClassResult so the other classes are unaffected.

    Args:
        source: Class name and timetable URL
        options: Parsing policies
        store: Storage backend, None for a dry run
        session: Shared HTTP session
        timeout: Fetch timeout in seconds

    Returns:
        ClassResult for the class
    """
    timer_start = perf_counter()
    log = logger.bind(class_name=source.name)
    log.info("class_started", url=source.url)

    try:
        html = await fetch_html(source.url, timeout=timeout, session=session)
        lessons, rows = parse_schedule_page(html, source.name, options)

        if not rows:
            log.warning("class_without_rows")
            return ClassResult(
                status=False,
                class_name=source.name,
                details="No timetable rows found",
                errors="NO_ROWS"
            )

        if not lessons:
            log.warning("class_without_lessons", rows=rows)

        if store is not None:
            await store.save_class_schedule(source.name, lessons)

        log.info(
            "class_completed",
            lessons=len(lessons),
            dry_run=store is None,
            total_seconds=round(perf_counter() - timer_start, 4)
        )
        return ClassResult(
            status=True,
            class_name=source.name,
            details=f"Seeded {len(lessons)} lessons" if lessons else "No lessons found in timetable",
            lessons_added=len(lessons)
        )

    except Exception as e:
        # Expected per-class failures do not need a traceback
        expected = isinstance(e, (FetchError, PersistenceError))
        log.error("class_failed", error=str(e), exc_info=not expected)
        return ClassResult(
            status=False,
            class_name=source.name,
            details="Class skipped",
            errors=f"{type(e).__name__}: {e}"
        )


async def seed_timetables(
        store: Optional[LessonStore],
        config: Optional[Config] = None,
        session: Optional[aiohttp.ClientSession] = None
) -> SeedSummary:
    """
    Run the whole seeding process.

    Stored data is only cleared once discovery succeeded.

    Args:
        store: Storage backend, None for a dry run
        config: Configuration (global one when omitted)
        session: Shared HTTP session (one is opened when omitted)

    Returns:
        SeedSummary with one ClassResult per discovered class

    Raises:
        DiscoveryError: The index page cannot be fetched or lists no class
    """
    config = config or get_config()
    options = config.parse_options()

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await seed_timetables(store, config, own_session)

    logger.info("seed_started", index_url=config.index_url, dry_run=store is None)

    try:
        index_html = await fetch_html(config.index_url, timeout=config.request_timeout, session=session)
    except FetchError as e:
        raise DiscoveryError(f"Cannot load index page: {e}") from e

    sources = discover_sources(index_html, config.base_url)

    if store is not None:
        await store.delete_all_lessons()
        await store.delete_all_classes()
        logger.info("store_cleared")

    semaphore = asyncio.Semaphore(config.max_concurrent_parses)

    async def seed_with_semaphore(source: ScheduleSource) -> ClassResult:
        async with semaphore:
            return await seed_class(source, options, store, session, config.request_timeout)

    results = await asyncio.gather(*(seed_with_semaphore(s) for s in sources))
    summary = SeedSummary(results=list(results))

    logger.info(
        "seed_completed",
        classes=len(summary.results),
        seeded=summary.seeded,
        skipped=summary.skipped,
        lessons=summary.total_lessons
    )

    return summary
