from unittest.mock import patch

from multisite_abilities.core.config import settings
from multisite_abilities.server.__main__ import main


def test_module_entry_point_runs_uvicorn() -> None:
    with patch("multisite_abilities.server.__main__.uvicorn.run") as mock_run:
        main()

    mock_run.assert_called_once_with(
        "multisite_abilities.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )
