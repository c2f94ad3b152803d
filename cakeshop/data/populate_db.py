import csv
import os
from sqlalchemy.orm import Session

from .database import SessionLocal, create_tables
from .models import Cake, UserProfile, UserRole
from ..app.config import Config
from ..utils.logger import get_logger

logger = get_logger()

CAKES_CSV_PATH = os.path.join(os.path.dirname(__file__), "raw", "cakes.csv")

def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes")

def populate_cakes(db: Session, csv_path: str = CAKES_CSV_PATH) -> int:
    """Read cakes.csv into the catalog. Returns the number of cakes added."""
    if db.query(Cake).count() > 0:
        logger.info("Cakes table is not empty. Skipping population.")
        return 0

    added = 0
    with open(csv_path, mode='r', encoding='utf-8') as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            db.add(Cake(
                name=row['name'],
                description=row['description'],
                base_price=float(row['base_price']),
                category=row['category'],
                allergens=[a for a in row.get('allergens', '').split(';') if a],
                featured=_as_bool(row.get('featured', 'false')),
                difficulty_level=int(row.get('difficulty_level') or 1),
                preparation_time_hours=int(row.get('preparation_time_hours') or 24),
                available=True,
            ))
            added += 1
    db.commit()
    logger.info(f"Added {added} cakes to the catalog.")
    return added

def ensure_admin(db: Session, external_id: str = None) -> UserProfile:
    """Promote (or create) the configured identity to an admin profile."""
    external_id = external_id or Config.ADMIN_EXTERNAL_ID
    if not external_id:
        return None

    profile = db.query(UserProfile).filter(UserProfile.external_id == external_id).first()
    if profile is None:
        profile = UserProfile(external_id=external_id, full_name="Bakery Admin", role=UserRole.admin)
        db.add(profile)
    else:
        profile.role = UserRole.admin
    db.commit()
    db.refresh(profile)
    logger.info(f"Admin profile ready: {profile.id}")
    return profile

def populate():
    """Create tables, seed the catalog and bootstrap the admin profile."""
    # Ensure tables are created
    create_tables()

    db = SessionLocal()
    try:
        populate_cakes(db)
        ensure_admin(db)
    except Exception as e:
        db.rollback()
        logger.error(f"Error populating database: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    populate()
