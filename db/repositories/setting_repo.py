from sqlalchemy.orm import Session

from db.models.setting import Setting, SETTINGS_ROW_ID


class SettingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self) -> Setting | None:
        return self.session.get(Setting, SETTINGS_ROW_ID)

    def get_or_create(self) -> Setting:
        setting = self.find()
        if setting is None:
            setting = Setting(id=SETTINGS_ROW_ID)
            self.session.add(setting)
            self.session.flush()
        return setting

    def update(self, **fields) -> Setting:
        setting = self.get_or_create()
        for key, value in fields.items():
            setattr(setting, key, value)
        self.session.flush()
        return setting
