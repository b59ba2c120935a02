from sqlalchemy import Column, Integer, String, Text
from firise.database import Base


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text, nullable=False)  # HTML
    image_url = Column(String(500), nullable=True)
    category = Column(String(20), nullable=False)  # budgeting/credit/saving/debt/banking/career/taxes
