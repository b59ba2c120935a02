from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean
from firise.database import Base


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    address = Column(String(255), nullable=True)
    distance = Column(Numeric(5, 2), nullable=True)  # miles
    type = Column(String(20), nullable=False)  # employment/housing/financial/education/health/legal/community
    bookmarked = Column(Boolean, nullable=False, default=False)
