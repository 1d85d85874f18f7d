from qt_material import apply_stylesheet

from fluxforge.models import Theme

QT_MATERIAL_THEMES = {
    Theme.DARK:  "dark_teal.xml",
    Theme.LIGHT: "light_teal.xml",
}


def apply_theme(app, theme: Theme) -> None:
    apply_stylesheet(
        app,
        theme=QT_MATERIAL_THEMES[theme],
        invert_secondary=theme is Theme.LIGHT,
    )
