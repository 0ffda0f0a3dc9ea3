import httpx
import logging
import re
from typing import Callable, List, Dict, Any, Optional
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

logger = logging.getLogger(__name__)

DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")
SHORT_MAX_SECONDS = 60
LONG_MIN_SECONDS = 180
OPTIMISTIC_SHORT_SECONDS = 90
DETAILS_BATCH_SIZE = 50

class YouTubeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    youtube_api_key: str = ""

class ChannelVideo(BaseModel):
    video_id: str
    title: str
    description: str = ""
    channel_id: str
    published_at: Optional[datetime] = None
    duration_seconds: int = 0
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    tags: List[str] = Field(default_factory=list)

def parse_duration(duration: Optional[str]) -> int:
    """Convert an ISO-8601 duration like PT1H2M3S to seconds, 0 when unparsable"""
    if not duration:
        return 0
    match = DURATION_PATTERN.match(duration)
    if not match:
        return 0
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds

def classify_short(duration_seconds: int, probe: Callable[[], bool]) -> bool:
    """Classify a video as a Short by duration, probing only the ambiguous range"""
    if duration_seconds <= SHORT_MAX_SECONDS:
        return True
    if duration_seconds > LONG_MIN_SECONDS:
        return False

    try:
        return probe()
    except httpx.HTTPError as e:
        logger.warning(f"Shorts probe failed, falling back to duration: {e}")
        return duration_seconds <= OPTIMISTIC_SHORT_SECONDS

def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429 or exc.response.status_code >= 500
    return isinstance(exc, httpx.RequestError)

class YouTubeClient:
    def __init__(self, settings: Optional[YouTubeSettings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or YouTubeSettings()
        self.base_url = "https://www.googleapis.com/youtube/v3"
        self.client = client or httpx.Client(
            timeout=10.0,
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=2)
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.client.close()

    def get_channel_videos(self, channel_id: str, max_results: int = 200) -> List[ChannelVideo]:
        """Fetch a channel's uploads with statistics and durations"""
        try:
            # Step 1: Resolve the uploads playlist
            playlist_id = self._fetch_uploads_playlist(channel_id)
            if not playlist_id:
                logger.warning(f"No uploads playlist for channel {channel_id}")
                return []

            # Step 2: Page through the playlist for video ids
            video_ids = self._fetch_playlist_video_ids(playlist_id, max_results)
            if not video_ids:
                return []

            # Step 3: Get detailed video information in batches
            videos = []
            for i in range(0, len(video_ids), DETAILS_BATCH_SIZE):
                batch = video_ids[i:i + DETAILS_BATCH_SIZE]
                videos.extend(self._parse_videos(self._fetch_videos_details(batch), channel_id))
            return videos

        except Exception as e:
            logger.error(f"Failed to fetch channel videos: {e}", extra={"channel_id": channel_id})
            raise

    def _fetch_uploads_playlist(self, channel_id: str) -> Optional[str]:
        data = self._make_request("channels", {
            "part": "contentDetails",
            "id": channel_id
        })
        items = data.get("items", [])
        if not items:
            return None
        return items[0].get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")

    def _fetch_playlist_video_ids(self, playlist_id: str, max_results: int) -> List[str]:
        video_ids: List[str] = []
        page_token = None

        while len(video_ids) < max_results:
            params = {
                "part": "contentDetails",
                "playlistId": playlist_id,
                "maxResults": min(50, max_results - len(video_ids))
            }
            if page_token:
                params["pageToken"] = page_token

            data = self._make_request("playlistItems", params)
            for item in data.get("items", []):
                video_id = item.get("contentDetails", {}).get("videoId")
                if video_id:
                    video_ids.append(video_id.strip())

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return video_ids[:max_results]

    def _fetch_videos_details(self, video_ids: List[str]) -> Dict[str, Any]:
        """Fetch detailed video information"""
        return self._make_request("videos", {
            "part": "snippet,statistics,contentDetails",
            "id": ",".join(video_ids)
        })

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(5),
        wait=wait_exponential_jitter(initial=1, max=30, jitter=0.2),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Retry {retry_state.attempt_number}: {retry_state.outcome.exception()}"
        )
    )
    def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request with retry logic for 429/5xx errors"""
        params = {
            **params,
            "key": self.settings.youtube_api_key
        }

        try:
            response = self.client.get(f"{self.base_url}/{endpoint}", params=params)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code}: {e}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error: {e}")
            raise

    def probe_is_short(self, video_id: str) -> bool:
        """A Short keeps its /shorts/ URL; regular videos redirect to /watch"""
        url = f"https://www.youtube.com/shorts/{video_id}"
        response = self.client.head(url, follow_redirects=True, timeout=10.0)
        return "/shorts/" in str(response.url)

    def _parse_videos(self, videos_data: Dict[str, Any], channel_id: str) -> List[ChannelVideo]:
        """Parse video data into ChannelVideo models"""
        videos = []

        for item in videos_data.get("items", []):
            try:
                snippet = item["snippet"]
                statistics = item.get("statistics", {})

                video = ChannelVideo(
                    video_id=item["id"].strip(),
                    title=snippet.get("title", ""),
                    description=snippet.get("description") or "",
                    channel_id=channel_id,
                    published_at=datetime.fromisoformat(snippet["publishedAt"].replace("Z", "+00:00")),
                    duration_seconds=parse_duration(item.get("contentDetails", {}).get("duration")),
                    view_count=int(statistics.get("viewCount", 0)),
                    like_count=int(statistics.get("likeCount", 0)),
                    comment_count=int(statistics.get("commentCount", 0)),
                    tags=snippet.get("tags", [])
                )
                videos.append(video)

            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse video {item.get('id', 'unknown')}: {e}")
                continue

        return videos
