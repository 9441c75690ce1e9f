from vidiary.util.paths import DiaryPaths

__all__ = ["DiaryPaths"]
