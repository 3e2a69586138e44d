# src/plikeme/scripts/seed.py
"""Seed the default community catalogue into an empty database."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from plikeme.db.session import SessionLocal
from plikeme.models import Community

logger = logging.getLogger(__name__)

CANCER_DIMENSIONS: dict[str, Any] = {
    "stage": {"label": "分期", "values": ["0期", "I期", "II期", "III期", "IV期"]},
    "type": {"label": "分型", "values": ["三阴性", "HER2阳性", "激素受体阳性"]},
}

DEFAULT_COMMUNITIES: list[dict[str, Any]] = [
    {
        "name": "糖尿病",
        "description": "分享血糖管理经验，交流饮食和运动心得，互相鼓励共同面对糖尿病。",
        "keywords": "糖尿病 血糖 胰岛素 糖尿",
    },
    {
        "name": "高血压",
        "description": "讨论血压控制方法，分享健康生活方式，一起守护心血管健康。",
        "keywords": "高血压 血压 心血管 心脏",
    },
    {
        "name": "抑郁症",
        "description": "在这里你不孤单。分享心路历程，获得理解与支持，一起走向阳光。",
        "keywords": "抑郁症 抑郁 心理 情绪 焦虑 心理健康",
    },
    {
        "name": "乳腺癌",
        "description": "抗癌路上，我们同行。分享治疗经验，传递希望与力量。",
        "keywords": "乳腺癌 乳腺 癌症 肿瘤 化疗",
        "dimensions": CANCER_DIMENSIONS,
    },
    {
        "name": "关节炎",
        "description": "交流关节养护知识，分享缓解疼痛的方法，提高生活质量。",
        "keywords": "关节炎 关节 风湿 类风湿 骨骼",
    },
    {
        "name": "失眠症",
        "description": "分享改善睡眠的方法，交流助眠技巧，一起找回安稳的夜晚。",
        "keywords": "失眠症 失眠 睡眠 睡不着 入睡困难",
    },
]


def seed_communities(db: Session) -> int:
    """Insert the default catalogue when no community exists yet.

    Returns:
        Number of communities created (0 when the table was already populated)
    """
    existing = db.scalar(select(func.count()).select_from(Community)) or 0
    if existing:
        logger.debug("communities already seeded (%d rows)", existing)
        return 0
    try:
        db.add_all(Community(**item) for item in DEFAULT_COMMUNITIES)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return len(DEFAULT_COMMUNITIES)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the default community catalogue")
    parser.parse_args()

    try:
        with SessionLocal() as db:
            created = seed_communities(db)
    except Exception as exc:
        print(f"[seed] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[seed] created {created} communities")


if __name__ == "__main__":
    main()
