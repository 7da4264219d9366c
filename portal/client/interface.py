from typing import List


class UserInterface:
    """
    Navigation and blocking dialogs, as seen by the controllers.

    This headless implementation records what happened: `location` is the
    current path, `history` every navigation, `alerts` every message shown.
    `confirm()` answers with `confirm_answer`. A front end overrides the three
    methods to show real dialogs.
    """

    def __init__(self, location: str = "/", confirm_answer: bool = True):
        self.location = location
        self.history: List[str] = [location]
        self.alerts: List[str] = []
        self.confirm_answer = confirm_answer

    def navigate(self, path: str) -> None:
        self.location = path
        self.history.append(path)

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        return self.confirm_answer
