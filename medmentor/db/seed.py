import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from medmentor.core.config import Settings
from medmentor.db.models import DrugInteraction
from medmentor.db.session import init_db, make_engine, make_session_factory, session_scope


SAMPLE_INTERACTIONS = [
    {
        "drug_a": "Warfarin",
        "drug_b": "Aspirin",
        "interaction_type": "major",
        "summary": "Combined use markedly increases bleeding risk.",
        "mechanism": (
            "Aspirin inhibits platelet aggregation and can irritate the gastric mucosa, "
            "adding to warfarin's anticoagulant effect."
        ),
        "safety_advice": "Avoid unless prescribed together; watch for bruising or black stools.",
        "evidence_source": "FDA Warfarin label",
        "confidence_level": "high",
    },
    {
        "drug_a": "Ibuprofen",
        "drug_b": "Amoxicillin",
        "interaction_type": "none",
        "summary": "No clinically significant interaction is documented.",
        "mechanism": "Different elimination pathways; no known pharmacokinetic overlap.",
        "safety_advice": "Generally safe together; take ibuprofen with food.",
        "evidence_source": "Drug interaction reference databases",
        "confidence_level": "high",
    },
    {
        "drug_a": "Acetaminophen",
        "drug_b": "Alcohol",
        "interaction_type": "major",
        "summary": "Regular alcohol use raises the risk of acetaminophen liver toxicity.",
        "mechanism": "Alcohol induces CYP2E1, increasing formation of the toxic metabolite NAPQI.",
        "safety_advice": "Limit alcohol and do not exceed the labeled daily dose.",
        "evidence_source": "FDA Acetaminophen boxed warning",
        "confidence_level": "high",
    },
    {
        "drug_a": "Metformin",
        "drug_b": "Atenolol",
        "interaction_type": "minor",
        "summary": "Beta-blockers may mask symptoms of low blood sugar.",
        "mechanism": "Beta-blockade blunts adrenergic warning signs such as tremor and palpitations.",
        "safety_advice": "Monitor blood glucose; sweating may remain the main hypoglycemia sign.",
        "evidence_source": "ADA Standards of Care",
        "confidence_level": "medium",
    },
]


async def seed_interactions(
    session_factory: async_sessionmaker[AsyncSession],
    rows=SAMPLE_INTERACTIONS,
) -> int:
    async with session_scope(session_factory) as session:
        for row in rows:
            session.add(DrugInteraction(**row))
    return len(rows)


async def main() -> None:
    settings = Settings()
    engine = make_engine(settings)
    await init_db(engine)
    count = await seed_interactions(make_session_factory(engine))
    await engine.dispose()
    print(f"Seeded {count} drug interactions into {settings.DATABASE_URL}")


if __name__ == "__main__":
    asyncio.run(main())
