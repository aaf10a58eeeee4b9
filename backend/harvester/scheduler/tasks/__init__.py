"""任务实现模块

包含所有具体的定时任务实现：
- HarvestBoardTask: 论坛抓取任务
"""

from harvester.scheduler.tasks.harvest_board import HarvestBoardTask

__all__ = [
    "HarvestBoardTask",
]
