"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from rjr_ledger.api.main import create_app
from rjr_ledger.infrastructure.database.models import Base
from rjr_ledger.infrastructure.database.session import engine_options, get_db, init_db
from rjr_ledger.domain.models import AmortizationInput


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def three_way_split() -> AmortizationInput:
    """R$ 300,00 in 3 monthly installments from mid-January"""
    return AmortizationInput(
        total_value=Decimal("300.00"),
        down_payment=Decimal("0.00"),
        installments_number=3,
        issue_date=date(2024, 1, 15),
    )


@pytest.fixture
def document_payload() -> dict:
    """Receivable with R$ 100,00 down payment and two installments"""
    return {
        "type": "credito",
        "document_number": "REC-001",
        "counterparty_name": "Restaurante Bom Sabor",
        "description": "Coleta de óleo - contrato anual",
        "payment_method": "pix",
        "issue_date": "2024-01-15",
        "document_value": "1.100,00",
        "discount": "100,00",
        "interest": "0",
        "down_payment": "100.00",
        "installments": [
            {"sequence_number": 1, "due_date": "2024-02-15", "amount": "450.00"},
            {"sequence_number": 2, "due_date": "2024-03-15", "amount": "450.00"},
        ],
    }
