from fastapi import Depends, FastAPI, HTTPException, Query
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.station_observation import StationObservation
from backend.app.models.weather_station import WeatherStation
from backend.app.schemas.weather_records import ObservationRecord, StationRecord

app = FastAPI(title="weather.gov Station Observations")

@app.get("/")
async def root():
    return {"message": "Welcome to the station observation API"}

@app.get("/health")
async def health_check():
    return {"status": "ok", "message": "Station observation API is up and running!"}

@app.get("/stations", response_model=list[StationRecord])
def list_stations(db: Session = Depends(get_db)):
    return db.query(WeatherStation).order_by(WeatherStation.call_id).all()

@app.get("/stations/{call_id}", response_model=StationRecord)
def get_station(call_id: str, db: Session = Depends(get_db)):
    station = db.get(WeatherStation, call_id)
    if station is None:
        raise HTTPException(status_code=404, detail=f"Station {call_id} not found")
    return station

@app.get("/stations/{call_id}/observations", response_model=list[ObservationRecord])
def list_observations(call_id: str, limit: int = Query(24, ge=1, le=500), db: Session = Depends(get_db)):
    # ISO-8601 strings from one provider sort chronologically
    return (
        db.query(StationObservation)
        .filter(StationObservation.station_id == call_id)
        .order_by(StationObservation.timestamp_UTC.desc())
        .limit(limit)
        .all()
    )

@app.get("/stations/{call_id}/observations/latest", response_model=ObservationRecord)
def latest_observation(call_id: str, db: Session = Depends(get_db)):
    observation = (
        db.query(StationObservation)
        .filter(StationObservation.station_id == call_id)
        .order_by(StationObservation.timestamp_UTC.desc())
        .first()
    )
    if observation is None:
        raise HTTPException(status_code=404, detail=f"No observations stored for {call_id}")
    return observation
