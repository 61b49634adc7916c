"""Built-in sample tenders, written into an empty cache so a new account's
workspace and detail views have something to show before the first fetch."""

from ..schemas.tenders import Tender

_SAMPLES = [
    {
        "id": "mock-1",
        "id_web": "23-145678",
        "title": "Rénovation énergétique des bâtiments communaux et installation de panneaux photovoltaïques",
        "buyer": "Mairie de Bordeaux",
        "deadline": "2024-12-15",
        "link_dce": "https://www.boamp.fr",
        "departments": ["33"],
        "descriptors": ["Travaux", "Électricité", "CVC"],
        "procedure_type": "Procédure adaptée",
        "contact": {"name": "Jean Dupont", "email": "j.dupont@bordeaux.fr", "phone": "05 56 00 00 00"},
        "lots": [
            {"lot_number": "1", "title": "Isolation extérieure", "description": "Bardage et ITE"},
            {"lot_number": "2", "title": "CVC", "description": "Remplacement chaudières"},
        ],
        "ai_summary": "Rénovation thermique de trois écoles. Lot CVC conséquent, critère prix pondéré à 40%.",
        "compatibility_score": 95,
        "estimated_budget": 450000,
        "full_description": "Marché de travaux pour la rénovation énergétique des bâtiments communaux.",
    },
    {
        "id": "mock-2",
        "id_web": "23-998877",
        "title": "Fourniture et maintenance de licences logicielles Microsoft 365",
        "buyer": "Conseil Régional Occitanie",
        "deadline": "2024-11-20",
        "link_dce": "https://www.boamp.fr",
        "departments": ["31", "34"],
        "descriptors": ["Informatique", "Logiciel"],
        "procedure_type": "Appel d'offres ouvert",
        "ai_summary": "Renouvellement du parc de licences, accord-cadre sur 4 ans. Pénalités de retard au CCAP.",
        "compatibility_score": 88,
        "estimated_budget": 1200000,
        "full_description": "Acquisition et maintenance de licences logicielles.",
    },
    {
        "id": "mock-3",
        "id_web": "23-112233",
        "title": "Prestations de nettoyage des locaux administratifs et vitrerie",
        "buyer": "Hôpital Nord",
        "deadline": "2024-10-30",
        "link_dce": "https://www.boamp.fr",
        "departments": ["13"],
        "descriptors": ["Nettoyage", "Services"],
        "procedure_type": "Procédure adaptée",
        "ai_summary": "Marché en partie réservé à l'insertion. Visite obligatoire avant remise des offres.",
        "compatibility_score": 45,
        "estimated_budget": 80000,
        "full_description": "Nettoyage courant des locaux administratifs.",
    },
    {
        "id": "mock-4",
        "id_web": "24-005678",
        "title": "Création d'un site internet vitrine et portail citoyen",
        "buyer": "Communauté de Communes du Val de Loire",
        "deadline": "2024-12-05",
        "link_dce": "https://www.boamp.fr",
        "departments": ["45"],
        "descriptors": ["Web", "Communication"],
        "procedure_type": "MAPA",
        "ai_summary": "Refonte complète sous CMS libre. Accessibilité RGAA niveau AA exigée.",
        "compatibility_score": 92,
        "estimated_budget": 35000,
        "full_description": "Développement d'un site vitrine et d'un portail citoyen.",
    },
    {
        "id": "mock-5",
        "id_web": "24-102030",
        "title": "AMO pour la construction d'un centre aquatique",
        "buyer": "Métropole Grand Paris",
        "deadline": "2025-01-15",
        "link_dce": "https://www.boamp.fr",
        "departments": ["75", "92"],
        "descriptors": ["Ingénierie", "Conseil"],
        "procedure_type": "Concours",
        "ai_summary": "Assistance à maîtrise d'ouvrage, références exigées sur des équipements sportifs > 10M€.",
        "compatibility_score": 60,
        "estimated_budget": 150000,
        "full_description": "Assistance technique, juridique et financière.",
    },
]


def sample_tenders() -> list[Tender]:
    return [Tender.model_validate(s) for s in _SAMPLES]
