import logging

import uvicorn

from config import HOST, LOG_DIR, LOG_LEVEL, PORT
from lecturequiz.utils.logger_setup import setup_logging
from lecturequiz.utils.startup_banner import banner_rows, startup_banner

log = logging.getLogger("LectureQuiz")


def main() -> None:
    log_path = setup_logging(log_dir=LOG_DIR, console_level=LOG_LEVEL, file_level="DEBUG")

    from lecturequiz.web.main import app

    startup_banner(
        banner_rows(
            app.state.llm,
            address=f"http://{HOST}:{PORT}",
            max_sessions=app.state.sessions.max_sessions,
        )
    )
    log.info("Writing logs to %s", log_path)

    # log_config=None keeps uvicorn on the handlers installed above
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
