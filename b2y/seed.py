"""Populate the listings table with mock data.

Usage: python -m b2y.seed [count]
"""

import asyncio
import random
import sys
from datetime import datetime, timezone
from typing import Optional
from b2y.models.listing import Listing, ListingType
from b2y.services.supabase_client import SupabaseClient
from b2y.utils.errors import SupabaseError
from b2y.utils.logging import get_structured_logger, log_timing
from b2y.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

BUSINESSES = [
    ("Padaria Artesanal", "Alimentação"),
    ("Cafeteria Gourmet", "Alimentação"),
    ("Hamburgueria Retrô", "Alimentação"),
    ("Loja de Produtos Naturais", "Varejo"),
    ("Bar de Cocktails", "Alimentação"),
    ("Escola de Yoga", "Saúde & Bem-estar"),
    ("Pet Shop de Luxo", "Serviços"),
    ("Barbearia Clássica", "Serviços"),
    ("E-commerce de Moda Sustentável", "Tecnologia"),
    ("Agência de Marketing Digital", "Serviços"),
    ("Fábrica de Cerveja Artesanal", "Indústria"),
    ("Pousada Charmosa na Serra", "Hotelaria"),
    ("Food Truck de Tacos", "Alimentação"),
    ("Consultório de Fisioterapia", "Saúde & Bem-estar"),
    ("Lava-rápido Ecológico", "Serviços"),
    ("Startup de Logística", "Tecnologia"),
    ("Fintech de Crédito", "Finanças"),
    ("Escola de Programação", "Educação"),
]

INVESTMENT_TITLES = [
    "Investimento em Expansão de Franquia",
    "Aporte para Lançamento de App",
    "Financiamento para Maquinário Agrícola",
    "Sócio-Investidor para Indústria 4.0",
    "Capital para E-commerce",
    "Projeto de Energia Solar",
]

CITIES = [
    "São Paulo, SP", "Rio de Janeiro, RJ", "Belo Horizonte, MG", "Porto Alegre, RS",
    "Curitiba, PR", "Salvador, BA", "Fortaleza, CE", "Recife, PE", "Florianópolis, SC",
    "Campinas, SP", "Sorocaba, SP", "Ribeirão Preto, SP", "Cotia, SP", "Barueri, SP",
]

DESCRIPTIONS = [
    "Negócio com clientela fiel e ponto comercial estratégico.",
    "Operação enxuta com altas margens e equipe treinada.",
    "Marca reconhecida no mercado local.",
    "Projeto inovador com equipe experiente e plano de negócios sólido.",
    "Mercado em alta com barreiras de entrada.",
]


def image_url(index: int) -> str:
    return f"https://picsum.photos/400/300?random={index}"


def build_mock_listing(index: int, rng: Optional[random.Random] = None) -> dict:
    """One mock listing row with ID mock_{index:04d}."""
    rng = rng or random.Random()
    is_business_sale = rng.random() > 0.3
    price = rng.randint(50_000, 5_000_000)
    annual_revenue = price * rng.randint(1, 4)
    monthly_revenue = annual_revenue / 12
    business_title, sector = rng.choice(BUSINESSES)
    title = business_title if is_business_sale else rng.choice(INVESTMENT_TITLES)
    now = datetime.now(timezone.utc).isoformat()

    listing = Listing(
        id=f"mock_{index:04d}",
        listing_type=ListingType.BUSINESS_SALE if is_business_sale else ListingType.INVESTMENT_SEEK,
        title=f"{title} #{index}",
        sector=sector,
        location=rng.choice(CITIES),
        price=price,
        description=rng.choice(DESCRIPTIONS),
        image_url=image_url(index),
        gallery=[image_url(index + offset) for offset in (1000, 2000, 3000)],
        annual_revenue=annual_revenue,
        profit_margin=rng.uniform(0.10, 0.45),
        employees=rng.randint(2, 50),
        monthly_costs={
            "rent": monthly_revenue * 0.10,
            "utilities": monthly_revenue * 0.03,
            "payroll": monthly_revenue * 0.15,
            "others": monthly_revenue * 0.05,
        },
        owner_id=f"mock_seller_{rng.randint(1, 50)}",
        created_at=now,
        updated_at=now,
    )
    return listing.model_dump(mode="json")


async def populate_listings(count: int = 1000, rng: Optional[random.Random] = None, batch_size: int = 100) -> int:
    """Upsert `count` mock listings in batches. Returns the number written."""
    rng = rng or random.Random()
    rows = [build_mock_listing(index, rng) for index in range(1, count + 1)]

    written = 0
    async with SupabaseClient() as client:
        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            try:
                client.table("listings").upsert(batch, on_conflict="id").execute()
            except Exception as e:
                raise SupabaseError(f"Failed to seed listings {start + 1}-{start + len(batch)}: {e}")
            written += len(batch)
            logger.info("Seeded listing batch", written=written, total=count)
    return written


def main(argv: Optional[list[str]] = None) -> int:
    LoggingConfig.ensure_configured()
    args = sys.argv[1:] if argv is None else argv
    count = int(args[0]) if args else 1000
    with log_timing("populate_listings", logger=logger, count=count):
        asyncio.run(populate_listings(count))
    return 0


if __name__ == "__main__":
    sys.exit(main())
