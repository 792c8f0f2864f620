from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()  # .env 파일 로드


class Settings(BaseSettings):
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "chat_room_db"
    debug: bool = False
    log_dir: str = "logs"
    cors_origins: List[str] = ["http://localhost:3000"]  # React 개발 서버

    # Presence (heartbeat / 비활성 참가자 정리)
    presence_sweep_interval_seconds: float = 15.0
    presence_stale_timeout_seconds: float = 10.0
    presence_monitor_enabled: bool = True

    # 전체 채팅방을 의미하는 예약된 수신자 이름
    broadcast_target: str = "Todos"

    class Config:
        env_file = ".env"


settings = Settings()
