import json
import os
import warnings

import altair as alt
import pandas as pd
import streamlit as st
from altair.utils.deprecation import AltairDeprecationWarning

warnings.filterwarnings("ignore", category=AltairDeprecationWarning)
from account_service import AccountService, Session
from challenge_service import PRESET_CHALLENGES, ChallengeService
from config import YamlConfig
from db import KeyValueStore
from localization import translator
from models import Gender, Goal, Level, MacroField, SetField, UserProfile
from nutrition_service import MealDraft
from planner_service import (
    USER_ERROR_MESSAGE,
    PlanGenerationError,
    PlannerService,
    PlanRequest,
)
from stats_service import MACRO_TARGETS, StatisticsService
from workout_service import WorkoutDraft

_ = translator.gettext

MEAL_FIELDS = {
    MacroField.CALORIES: "meal_calories",
    MacroField.PROTEIN: "meal_protein",
    MacroField.CARBS: "meal_carbs",
    MacroField.FATS: "meal_fats",
}
MACRO_LABELS = {
    MacroField.CALORIES: "Calories",
    MacroField.PROTEIN: "Protein",
    MacroField.CARBS: "Carbs",
    MacroField.FATS: "Fats",
}


class FitApp:
    """Streamlit application for workout, nutrition and challenge tracking."""

    def __init__(
        self,
        db_path: str = "fitgenius.db",
        yaml_path: str = "settings.yaml",
        gateway=None,
    ) -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.settings()
        translator.set_language(self.settings.language)
        self.store = KeyValueStore(db_path)
        self.accounts = AccountService(self.store)
        self.accounts.restore()
        self.gateway = gateway

    def run(self) -> None:
        st.title("FitGenius AI")
        if not self.accounts.is_authenticated:
            self._auth_page()
            return
        session = self.accounts.require_session()
        (
            home_tab,
            log_tab,
            coach_tab,
            food_tab,
            challenges_tab,
            profile_tab,
        ) = st.tabs(
            [
                _("Home"),
                _("Log"),
                _("Coach"),
                _("Food"),
                _("Challenges"),
                _("Profile"),
            ]
        )
        with home_tab:
            self._dashboard_tab(session)
        with log_tab:
            self._log_tab(session)
        with coach_tab:
            self._coach_tab()
        with food_tab:
            self._nutrition_tab(session)
        with challenges_tab:
            self._challenges_tab(session)
        with profile_tab:
            self._profile_tab(session)

    def _auth_page(self) -> None:
        mode = st.radio(
            "Mode",
            [_("Login"), _("Register")],
            horizontal=True,
            key="auth_mode",
            label_visibility="collapsed",
        )
        registering = mode == _("Register")
        name = st.text_input(_("Full Name"), key="auth_name") if registering else ""
        username = st.text_input(_("Username"), key="auth_username")
        password = st.text_input(_("Password"), type="password", key="auth_password")
        if st.button(mode, key="auth_submit"):
            try:
                if registering:
                    self.accounts.register(username, password, name)
                else:
                    self.accounts.login(username, password)
            except ValueError as e:
                st.error(_(str(e)))
            else:
                st.rerun()

    def _volume_chart(self, session: Session) -> None:
        points = StatisticsService.volume_series(session.workouts.list())
        df = pd.DataFrame(
            {
                "date": [p.display_date for p in points],
                "volume": [p.volume for p in points],
                "name": [p.name for p in points],
            }
        )
        df["order"] = range(len(df))
        labels = json.dumps(list(df["date"]))
        chart = (
            alt.Chart(df)
            .mark_area(line=True, opacity=0.3, color="#10b981")
            .encode(
                x=alt.X(
                    "order:O",
                    title=None,
                    axis=alt.Axis(labelExpr=f"{labels}[datum.value]", labelAngle=0),
                ),
                y=alt.Y("volume:Q", title="kg"),
                tooltip=["date", "name", "volume"],
            )
        )
        st.altair_chart(chart, use_container_width=True)

    def _dashboard_tab(self, session: Session) -> None:
        workouts = session.workouts.list()
        cols = st.columns(2)
        cols[0].metric(
            _("Total Volume"), f"{StatisticsService.total_volume(workouts):,.0f} kg"
        )
        cols[1].metric(_("Workouts"), len(workouts))
        if not workouts:
            st.info(_("No workouts logged yet."))
            return
        st.subheader(_("Volume Progress"))
        self._volume_chart(session)
        st.subheader(_("Recent History"))
        recent = StatisticsService.recent_workouts(
            workouts, self.settings.recent_history_limit
        )
        for w in recent:
            day = StatisticsService.day_prefix(w.date)
            st.markdown(
                f"**{w.name}** · {day} · {len(w.exercises)} ex · {w.total_volume:,.0f} kg"
            )

    def _draft(self) -> WorkoutDraft:
        if "workout_draft" not in st.session_state:
            st.session_state["workout_draft"] = WorkoutDraft()
        return st.session_state["workout_draft"]

    def _reset_draft(self) -> None:
        st.session_state["workout_draft"] = WorkoutDraft()
        st.session_state.pop("draft_name", None)

    def _log_tab(self, session: Session) -> None:
        draft = self._draft()
        draft.name = st.text_input(_("Workout Name"), value=draft.name, key="draft_name")
        for idx, ex in enumerate(list(draft.exercises)):
            with st.expander(f"{_('Exercise')} {idx + 1}", expanded=True):
                name = st.text_input(
                    _("Exercise"),
                    value=ex.name,
                    key=f"ex_name_{ex.id}",
                    placeholder=f"{_('Exercise')} {idx + 1}",
                )
                draft.rename_exercise(ex.id, name)
                for s_idx, s in enumerate(list(ex.sets)):
                    cols = st.columns([1, 3, 3, 2])
                    cols[0].markdown(f"**{s_idx + 1}**")
                    weight = cols[1].number_input(
                        _("Weight (kg)"),
                        min_value=0.0,
                        value=float(s.weight),
                        step=0.5,
                        key=f"set_weight_{s.id}",
                    )
                    reps = cols[2].number_input(
                        _("Reps"),
                        min_value=0,
                        value=int(s.reps),
                        step=1,
                        key=f"set_reps_{s.id}",
                    )
                    draft.update_set(ex.id, s.id, SetField.WEIGHT, weight)
                    draft.update_set(ex.id, s.id, SetField.REPS, reps)
                    if cols[3].button(_("Remove"), key=f"remove_set_{s.id}"):
                        draft.remove_set(ex.id, s.id)
                        st.rerun()
                cols = st.columns(2)
                if cols[0].button(_("Add Set"), key=f"add_set_{ex.id}"):
                    draft.add_set(ex.id)
                    st.rerun()
                if cols[1].button(_("Remove"), key=f"remove_ex_{ex.id}"):
                    draft.remove_exercise(ex.id)
                    st.rerun()
        if st.button(_("Add Exercise"), key="add_exercise"):
            draft.add_exercise()
            st.rerun()
        st.caption(f"{draft.volume:,.0f} kg")
        cols = st.columns(2)
        if cols[0].button(_("Cancel"), key="cancel_workout"):
            self._reset_draft()
            st.rerun()
        if cols[1].button(_("Save Workout"), key="save_workout"):
            try:
                workout = session.workouts.save(draft)
            except ValueError as e:
                st.error(_(str(e)))
            else:
                self._reset_draft()
                st.success(f"{workout.name}: {workout.total_volume:,.0f} kg")

    def _coach_tab(self) -> None:
        goal = st.selectbox(
            _("Goal"), list(Goal), format_func=lambda g: g.value, key="plan_goal"
        )
        level = st.selectbox(
            _("Level"),
            list(Level),
            index=1,
            format_func=lambda lv: lv.value,
            key="plan_level",
        )
        days = st.slider(_("Days per week"), 1, 7, 3, key="plan_days")
        equipment = st.text_input(_("Equipment"), "Full gym", key="plan_equipment")
        if st.button(_("Generate Plan"), key="generate_plan"):
            st.session_state.pop("ai_plan", None)
            request = PlanRequest(
                goal=goal, level=level, days_per_week=days, equipment=equipment
            )
            with st.spinner("..."):
                try:
                    planner = PlannerService.from_settings(self.settings, self.gateway)
                    st.session_state["ai_plan"] = planner.generate_plan(request)
                except PlanGenerationError:
                    st.error(_(USER_ERROR_MESSAGE))
        plan = st.session_state.get("ai_plan")
        if plan is None:
            return
        st.header(plan.plan_name)
        st.write(plan.description)
        for day in plan.schedule:
            with st.expander(f"{day.day_name} · {day.focus}", expanded=True):
                for ex in day.exercises:
                    line = f"**{ex.name}**: {ex.sets} x {ex.reps}"
                    if ex.notes:
                        line += f"  \n_{ex.notes}_"
                    st.markdown(line)

    def _nutrition_tab(self, session: Session) -> None:
        summary = session.nutrition.today()
        calories = summary.progress[MacroField.CALORIES]
        st.metric(
            _("Calories"),
            f"{calories.current} / {MACRO_TARGETS[MacroField.CALORIES]} kcal",
        )
        for macro in (MacroField.PROTEIN, MacroField.CARBS, MacroField.FATS):
            progress = summary.progress[macro]
            st.progress(
                progress.fraction,
                text=f"{_(MACRO_LABELS[macro])}: {progress.current}g / {progress.target}g",
            )
        with st.expander(_("Add Meal")):
            st.text_input(_("Meal name"), key="meal_name")
            cols = st.columns(4)
            for col, (macro, key) in zip(cols, MEAL_FIELDS.items()):
                col.text_input(_(MACRO_LABELS[macro]), key=key)
            if st.button(_("Save"), key="save_meal"):
                draft = MealDraft(st.session_state.get("meal_name", ""))
                for macro, key in MEAL_FIELDS.items():
                    draft.set(macro, st.session_state.get(key, ""))
                try:
                    session.nutrition.add(draft)
                except ValueError as e:
                    st.error(_(str(e)))
                else:
                    for key in ["meal_name", *MEAL_FIELDS.values()]:
                        st.session_state.pop(key, None)
                    st.rerun()
        st.subheader(_("Today's Meals"))
        if not summary.meals:
            st.info(_("No meals logged today."))
        for meal in summary.meals:
            cols = st.columns([4, 1])
            cols[0].markdown(
                f"**{meal.name}** · {meal.calories} kcal · "
                f"P {meal.protein}g · C {meal.carbs}g · F {meal.fats}g"
            )
            if cols[1].button(_("Delete"), key=f"delete_meal_{meal.id}"):
                session.nutrition.delete(meal.id)
                st.rerun()

    def _challenges_tab(self, session: Session) -> None:
        if st.button(_("New Challenge"), key="toggle_presets"):
            st.session_state["show_presets"] = not st.session_state.get(
                "show_presets", False
            )
        if st.session_state.get("show_presets", False):
            for idx, preset in enumerate(PRESET_CHALLENGES):
                if st.button(
                    f"{preset.title}: {preset.description}", key=f"preset_{idx}"
                ):
                    session.challenges.add_preset(idx)
                    st.session_state["show_presets"] = False
                    st.rerun()
        for challenge in session.challenges.list():
            st.subheader(challenge.title)
            st.caption(challenge.description)
            status = _("Completed!") if challenge.completed else _("In progress")
            st.progress(
                ChallengeService.progress_fraction(challenge),
                text=f"{challenge.current:g} / {challenge.target:g} {challenge.unit} · {status}",
            )
            cols = st.columns(2)
            if not challenge.completed:
                step = ChallengeService.increment_amount(challenge)
                if cols[0].button(
                    f"+{step:g} {challenge.unit}", key=f"increment_{challenge.id}"
                ):
                    session.challenges.increment_by_id(challenge.id)
                    st.rerun()
            if cols[1].button(_("Delete"), key=f"delete_challenge_{challenge.id}"):
                session.challenges.delete(challenge.id)
                st.rerun()

    def _profile_tab(self, session: Session) -> None:
        user = session.user
        profile = user.profile
        st.subheader(user.name)
        st.caption(f"@{user.username}")
        genders = [None, *Gender]
        with st.form("profile_form"):
            age = st.number_input(
                _("Age"), min_value=0, value=profile.age or 0, step=1
            )
            weight = st.number_input(
                f"{_('Weight')} (kg)",
                min_value=0.0,
                value=float(profile.weight or 0.0),
                step=0.5,
            )
            height = st.number_input(
                _("Height (cm)"),
                min_value=0.0,
                value=float(profile.height or 0.0),
                step=1.0,
            )
            gender = st.selectbox(
                _("Gender"),
                genders,
                index=genders.index(profile.gender),
                format_func=lambda g: "-" if g is None else g.value,
            )
            if st.form_submit_button(_("Save Profile")):
                self.accounts.update_profile(
                    UserProfile(
                        age=int(age) or None,
                        weight=weight or None,
                        height=height or None,
                        gender=gender,
                    )
                )
                st.rerun()
        languages = ["en", "it"]
        language = st.selectbox(
            _("Language"),
            languages,
            index=languages.index(self.settings.language),
            key="language",
        )
        if language != self.settings.language:
            self.config.save({**self.config.load(), "language": language})
            st.rerun()
        if st.button(_("Logout"), key="logout"):
            self.accounts.logout()
            self._reset_draft()
            st.session_state.pop("ai_plan", None)
            st.rerun()


if __name__ == "__main__":
    db_path = os.environ.get("DB_PATH", "fitgenius.db")
    yaml_path = os.environ.get("YAML_PATH", "settings.yaml")
    FitApp(db_path=db_path, yaml_path=yaml_path).run()
