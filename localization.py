class Translator:
    def __init__(self) -> None:
        self.language = "en"
        self.translations = {
            "en": {},
            "it": {
                "Home": "Home",
                "Log": "Registra",
                "Coach": "Coach",
                "Food": "Cibo",
                "Challenges": "Sfide",
                "Profile": "Profilo",
                "Login": "Accedi",
                "Register": "Registrati",
                "Logout": "Esci",
                "Username": "Nome utente",
                "Password": "Password",
                "Full Name": "Nome completo",
                "Total Volume": "Volume totale",
                "Workouts": "Allenamenti",
                "Volume Progress": "Progressi volume",
                "Recent History": "Storico recente",
                "No workouts logged yet.": "Nessun allenamento registrato.",
                "Workout Name": "Nome allenamento",
                "Add Exercise": "Aggiungi esercizio",
                "Add Set": "Aggiungi set",
                "Remove": "Rimuovi",
                "Save Workout": "Salva allenamento",
                "Cancel": "Annulla",
                "Exercise": "Esercizio",
                "Weight (kg)": "Peso (kg)",
                "Reps": "Ripetizioni",
                "Goal": "Obiettivo",
                "Level": "Livello",
                "Days per week": "Giorni a settimana",
                "Equipment": "Attrezzatura",
                "Generate Plan": "Genera piano",
                "Plan generation failed. Please try again later.": "Errore nella generazione del piano. Riprova più tardi.",
                "Calories": "Calorie",
                "Protein": "Proteine",
                "Carbs": "Carboidrati",
                "Fats": "Grassi",
                "Add Meal": "Aggiungi pasto",
                "Meal name": "Nome pasto",
                "Save": "Salva",
                "Today's Meals": "Pasti di oggi",
                "No meals logged today.": "Nessun pasto registrato oggi.",
                "New Challenge": "Nuova sfida",
                "Completed!": "Completata!",
                "In progress": "In corso",
                "Delete": "Elimina",
                "Age": "Età",
                "Weight": "Peso",
                "Height (cm)": "Altezza (cm)",
                "Gender": "Genere",
                "Save Profile": "Salva profilo",
                "Language": "Lingua",
                "Please enter a workout name": "Inserisci un nome per l'allenamento",
                "Add at least one exercise": "Aggiungi almeno un esercizio",
                "Invalid credentials": "Credenziali non valide",
                "Username already exists": "Nome utente già esistente",
                "Please fill in all fields": "Compila tutti i campi",
                "Meal name is required": "Il nome del pasto è obbligatorio",
                "Calories must be a non-negative whole number": "Le calorie devono essere un numero intero non negativo",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)


translator = Translator()
