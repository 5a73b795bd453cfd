from __future__ import annotations

import json
import logging
from dataclasses import asdict

from review_sentiment.session import ReviewSession
from review_sentiment.settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    s = load_settings()
    session = ReviewSession.from_settings(s)

    try:
        if not session.start():
            logger.error("Sentiment backend unavailable: backend=%s", s.sentiment_backend)
            return
        logger.info("Backend status: %s", session.status)

        loaded = session.load_reviews()
        logger.info("Load result: level=%s reviews=%s", loaded.level, loaded.reviews_loaded)
        if loaded.level != "info":
            logger.warning(loaded.message)
        if loaded.reviews_loaded == 0:
            print("[]")
            return

        outcomes = [session.analyze_random_review() for _ in range(s.run_analyze_count)]
        logger.info("Analyzed: total=%s positive=%s", session.stats.analyzed, session.stats.positive)

        # Minimal output for inspection (CLI only)
        print(json.dumps([asdict(o) for o in outcomes], ensure_ascii=False, indent=2))
    finally:
        session.close()


if __name__ == "__main__":
    main()
