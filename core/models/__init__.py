"""Core database models"""
from .content_videos import ContentVideo
from .youtube_channels import YouTubeChannel
from .youtube_videos import YouTubeVideo
from .topics import Topic

__all__ = ["ContentVideo", "YouTubeChannel", "YouTubeVideo", "Topic"]
