from sqlalchemy import Column, Float, Integer, String
from sqlalchemy.orm import relationship

from city_explorer.database import Base


class Location(Base):
    """Resolved place, keyed by the free-text query that produced it."""

    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    search_query = Column(String, unique=True, nullable=False, index=True)
    formatted_query = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    weather = relationship("Weather", back_populates="location")
    events = relationship("Event", back_populates="location")
    movies = relationship("Movie", back_populates="location")
