import logging

from .database import SessionLocal, init_db
from .models import Restaurant

logger = logging.getLogger(__name__)


def _table(table_id, label, seats, x, y, floor_id, shape="square"):
    size = 60 if seats <= 4 else 90
    return {
        "id": table_id, "type": "table", "label": label, "seats": seats, "shape": shape,
        "x": x, "y": y, "width": size, "height": size, "floor_id": floor_id,
    }


def init_database():
    """Create the schema and a demo restaurant with a two-floor layout"""
    init_db()

    db = SessionLocal()

    try:
        # Check if data already exists
        if db.query(Restaurant).first():
            logger.info("Database already initialized. Skipping...")
            return

        floors = [
            {"id": "main", "name": "Main hall"},
            {"id": "terrace", "name": "Terrace"},
        ]

        layout = [
            # Main hall: four 2-seaters along the window, two 4-seaters, one 8-seater
            _table("t1", "1", 2, 80, 80, "main", "circle"),
            _table("t2", "2", 2, 180, 80, "main", "circle"),
            _table("t3", "3", 2, 280, 80, "main", "circle"),
            _table("t4", "4", 2, 380, 80, "main", "circle"),
            _table("t5", "5", 4, 120, 220, "main"),
            _table("t6", "6", 4, 260, 220, "main"),
            _table("t7", "7", 8, 420, 240, "main"),
            {"id": "w1", "type": "window", "x": 230, "y": 20, "width": 400, "height": 10, "floor_id": "main"},
            {"id": "b1", "type": "bar", "x": 560, "y": 120, "width": 40, "height": 200, "floor_id": "main"},
            {"id": "txt1", "type": "text", "label": "Entrance", "x": 300, "y": 360,
             "width": 100, "height": 20, "floor_id": "main"},
            # Terrace
            _table("t8", "8", 4, 100, 100, "terrace"),
            _table("t9", "9", 4, 220, 100, "terrace"),
            _table("t10", "10", 6, 160, 220, "terrace"),
            {"id": "p1", "type": "plant", "x": 40, "y": 40, "width": 30, "height": 30, "floor_id": "terrace"},
        ]

        restaurant = Restaurant(
            name="Night Owl Bistro",
            address="12 Riverside Embankment",
            work_starts="12:00",
            work_ends="02:00",
            layout=layout,
            floors=floors,
        )
        db.add(restaurant)
        db.commit()

        tables = [el for el in layout if el["type"] == "table"]
        logger.info(
            f"Database initialized: restaurant '{restaurant.name}' with "
            f"{len(tables)} tables on {len(floors)} floors"
        )

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_database()
